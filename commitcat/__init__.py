"""
Commit Cat

AI-reviewed commits from staged git changes.
"""

__version__ = "2.0.0"

# Languages the review prompt can be written in.
# Used by: prompts/builder.py (system instruction), cli/args.py (argparse)
LANGUAGES = {
    'en': 'English',
    'ko': 'Korean',
}

LANGUAGE_CODES = list(LANGUAGES.keys())

# Model tiers per provider: 'lite' is fast and cheap, 'flash' follows instructions better
MODEL_TIERS = {
    'gemini': {
        'lite': 'gemini-2.5-flash-lite',
        'flash': 'gemini-3-flash-preview',
    },
    'claude': {
        'lite': 'claude-3-5-haiku-latest',
        'flash': 'claude-sonnet-4-20250514',
    },
}

PROVIDER_NAMES = list(MODEL_TIERS.keys())
TIER_NAMES = ['lite', 'flash']
