"""Prompt Construction Package"""

from commitcat.prompts.builder import PromptBuilder, OUTPUT_SCHEMA

__all__ = ["PromptBuilder", "OUTPUT_SCHEMA"]
