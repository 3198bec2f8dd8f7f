"""pagescore: rule-based page quality scoring for AI-model visibility.

Scores crawled pages along authority, freshness, structure and technical
dimensions from pre-extracted signals and optional pre-computed LLM analysis.
The engine never parses HTML and never calls an LLM itself.
"""
