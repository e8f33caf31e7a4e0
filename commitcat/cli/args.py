"""CLI Argument Parsing"""

import argparse
import argcomplete

from commitcat import LANGUAGE_CODES, PROVIDER_NAMES, __version__


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='commit-cat',
        description='Review staged changes with AI, then commit',
        epilog='Example: commit-cat -k (review in Korean)'
    )

    parser.add_argument('-v', '--version', action='version', version=f'%(prog)s {__version__}')

    # Language options
    parser.add_argument('-k', '--korean', dest='language', action='store_const', const='ko', help='Write the review and commit message in Korean')
    parser.add_argument('--lang', dest='language', type=str, choices=LANGUAGE_CODES, help='Review language')

    # Model tier
    tier = parser.add_mutually_exclusive_group()
    tier.add_argument('-f', '--flash', dest='tier', action='store_const', const='flash', help='Use the stronger flash model')
    tier.add_argument('-l', '--lite', dest='tier', action='store_const', const='lite', help='Use the fast lite model (default)')

    # LLM options
    parser.add_argument('-p', '--provider', type=str, choices=PROVIDER_NAMES, help='LLM provider')
    parser.add_argument('-m', '--model', type=str, metavar='MODEL', help='Model name (overrides the tier)')

    # Output options
    parser.add_argument('--verbose', action='store_true', help='Show debug logs on stderr')

    # Setup/config
    parser.add_argument('--setup', action='store_true', help='Configure defaults')
    parser.add_argument('--display-config', action='store_true', help='Show current configuration')
    parser.add_argument('--install-completion', action='store_true', help='Install shell tab completion')

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    argcomplete.autocomplete(parser)
    return parser.parse_args(argv)
