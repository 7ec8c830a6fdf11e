"""Recommendation engine — store scoring and chat explanation.

Modules:
    config           Centralized weights, bonuses, thresholds and LLM params
    scorer           Weighted multi-factor store scoring and reason text
    context_builder  Prompt assembly for the shopping and dietary chat variants
    assistant        Rate-limited chat call with canned fallback

Pipeline:
    compute_store_totals → score_and_recommend → (frozen per session)
    → build_prompt → ChatAssistant.reply
"""
