"""CLI Main Entry Point"""

import os
import sys

from dotenv import load_dotenv
from loguru import logger

from commitcat.config import (
    VALID_PROVIDERS, Config, PreconditionError, Settings, load_config, resolve_api_key, resolve_model,
)
from commitcat.git import CollectorConfig, DiffCollector, GitError, GitRepository
from commitcat.llm import LLMError, get_client
from commitcat.log import setup_logger
from commitcat.output import dim, print_error
from commitcat.prompts import PromptBuilder
from commitcat.review import ReviewService, SuggestionInjector

from commitcat.cli.args import parse_args
from commitcat.cli.commands import display_config, run_install_completion, run_setup
from commitcat.cli.session import ResolutionLoop


def _handle_subcommands(args):
    """Handle subcommands that exit early.

    Returns:
        tuple: (exit_code, should_exit) - exit_code if should_exit is True
    """
    if args.install_completion:
        return run_install_completion(), True
    if args.display_config:
        return display_config(), True
    if args.setup:
        return run_setup(), True
    return 0, False


def resolve_settings(args, config: Config) -> Settings:
    """Resolve provider, model, language and credential.

    Precedence: CLI args > environment variables > config file

    Raises:
        PreconditionError: unknown provider or missing API key
    """
    provider = args.provider or os.environ.get('CAT_PROVIDER') or config.provider
    if provider not in VALID_PROVIDERS:
        raise PreconditionError(f"Unknown provider '{provider}'. Use one of: {', '.join(sorted(VALID_PROVIDERS))}")

    tier = args.tier or config.tier
    model = resolve_model(provider, tier, args.model or os.environ.get('CAT_MODEL') or config.model)
    language = args.language or config.language

    return Settings(
        provider=provider,
        model=model,
        language=language,
        api_key=resolve_api_key(provider),
        config=config,
    )


def _review_flow(settings: Settings) -> int:
    config = settings.config
    try:
        git = GitRepository()
    except GitError as e:
        print_error(str(e))
        return 1

    try:
        client = get_client(settings.provider, settings.api_key, model=settings.model,
                            temperature=config.temperature)
    except LLMError as e:
        print_error(str(e))
        return 1

    collector = DiffCollector(
        git.get_file_diff,
        git.root,
        CollectorConfig(
            max_file_size=config.max_file_size,
            max_total_size=config.max_total_size,
            ignore_patterns=config.ignore_patterns,
            binary_extensions=config.binary_extensions,
        ),
    )
    reviewer = ReviewService(client, PromptBuilder(config.max_prompt_chars))
    loop = ResolutionLoop(git, collector, reviewer, SuggestionInjector(git.root), language=settings.language)
    return loop.run()


def main() -> int:
    """Main entry point for the CLI."""
    # .env feeds CAT_LOG_LEVEL and the API keys, so it loads before anything reads them
    load_dotenv()
    args = parse_args()
    setup_logger(args.verbose)

    # Handle subcommands that exit early
    exit_code, should_exit = _handle_subcommands(args)
    if should_exit:
        return exit_code

    config = load_config()

    # Credentials are checked before any git or network work
    try:
        settings = resolve_settings(args, config)
    except PreconditionError as e:
        print_error(str(e))
        return 1
    logger.debug(f"Provider={settings.provider} model={settings.model} language={settings.language}")

    try:
        return _review_flow(settings)
    except KeyboardInterrupt:
        print(f"\n{dim('Operation cancelled.')}")
        return 0


if __name__ == "__main__":
    sys.exit(main())
