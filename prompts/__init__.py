"""
prompts/ — LLM prompt templates for the summarizer.

    from prompts.summary import DEFAULT_SUMMARY_PROMPT, compose_prompt
"""
