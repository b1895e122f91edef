"""Minion CLI scripts.

This package contains the CLI command implementations organized by domain:
- fetch: Fetch a URL as text
- skill: Suggest, refresh, apply, merge, analyze and list skills
- group: Coherence analysis of source groups
- sync: Git sync status, history, push and sync log health
- usage: LLM usage totals
"""
