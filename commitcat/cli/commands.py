"""CLI Commands"""

import os
import sys

from commitcat import LANGUAGES, MODEL_TIERS
from commitcat.config import API_KEY_ENV_VARS, Config, get_config_path, load_config, resolve_model, save_config
from commitcat.output import bold, dim, info, print_success, warning


def _key_status(provider: str) -> str:
    for name in API_KEY_ENV_VARS[provider]:
        if os.environ.get(name, "").strip():
            return info(f"set ({name})")
    return warning("missing")


def display_config() -> int:
    """Display current configuration."""
    config = load_config()
    config_path = get_config_path()

    print(f"\n{bold('Current Configuration')}\n")

    if config_path:
        print(f"  {dim('Loaded from:')} {config_path}")
    else:
        print(f"  {dim('Loaded from:')} defaults (no .catrc found)")

    env_provider = os.environ.get('CAT_PROVIDER')
    env_model = os.environ.get('CAT_MODEL')
    if env_provider or env_model:
        print(f"  {dim('Environment overrides:')}")
        if env_provider:
            print(f"    CAT_PROVIDER={env_provider}")
        if env_model:
            print(f"    CAT_MODEL={env_model}")

    print()
    print(f"  {bold('Settings:')}")
    print(f"    provider:         {info(config.provider)}")
    print(f"    tier:             {info(config.tier)}")
    print(f"    model:            {info(resolve_model(config.provider, config.tier, config.model))}")
    print(f"    language:         {info(LANGUAGES[config.language])}")
    print(f"    max_file_size:    {info(str(config.max_file_size))}")
    print(f"    max_total_size:   {info(str(config.max_total_size))}")
    print(f"    max_prompt_chars: {info(str(config.max_prompt_chars))}")
    print(f"    api key:          {_key_status(config.provider)}")

    print(f"\n  {dim('Config locations:')}")
    print("    Local:  .catrc (in current directory)")
    print("    Global: ~/.catrc")
    print(f"\n  {dim('Run')} commit-cat --setup {dim('to configure')}\n")

    return 0


def _choose(prompt: str, choices: list[str], default: str) -> str:
    for i, choice in enumerate(choices, 1):
        print(f"  {i}. {choice}{dim(' (default)') if choice == default else ''}")
    print()
    while True:
        answer = input(f"{prompt} [1-{len(choices)}] (Enter for default): ").strip()
        if answer == '':
            return default
        if answer.isdigit() and 1 <= int(answer) <= len(choices):
            return choices[int(answer) - 1]


def run_setup() -> int:
    """Quick setup wizard."""
    display_config()
    print(f"{bold('Setup Wizard')}\n")
    current = load_config()

    print("Choose provider:\n")
    provider = _choose("Select", list(MODEL_TIERS), current.provider)

    print("\nModel tier:\n")
    for name, model in MODEL_TIERS[provider].items():
        print(dim(f"  {name}: {model}"))
    print()
    tier = _choose("Select", list(MODEL_TIERS[provider]), current.tier)

    model = input("\nCustom model name (Enter to use the tier): ").strip() or None

    print("\nReview language:\n")
    language = _choose("Select", list(LANGUAGES), current.language)

    config = Config(
        provider=provider,
        model=model,
        tier=tier,
        language=language,
        max_file_size=current.max_file_size,
        max_total_size=current.max_total_size,
        max_prompt_chars=current.max_prompt_chars,
        temperature=current.temperature,
        ignore_patterns=current.ignore_patterns,
        binary_extensions=current.binary_extensions,
    )
    path = save_config(config, global_config=True)

    print_success(f"Saved to {path}")
    return 0


def run_install_completion() -> int:
    """Install shell tab completion."""
    shell = os.environ.get('SHELL', '')
    line = 'eval "$(register-python-argcomplete commit-cat)"'
    powershell = "register-python-argcomplete --shell powershell commit-cat | Out-String | Invoke-Expression"

    print(f"\n{bold('Tab Completion Setup')}\n")

    if 'zsh' in shell or 'bash' in shell:
        rc_name = '~/.zshrc' if 'zsh' in shell else '~/.bashrc'
        print(f"Add this line to {dim(os.path.expanduser(rc_name))}:\n")
        print(f"  {line}\n")
        print(f"Then run: {dim('source ' + rc_name)}")
    elif sys.platform == 'win32':
        print("For PowerShell, run:\n")
        print(f"  {powershell}\n")
        print("To make it permanent, add to your $PROFILE:\n")
        print(f"  {powershell}")
    else:
        print("Run one of these based on your shell:\n")
        print(f"  {dim('# Bash/Zsh')}")
        print(f"  {line}\n")
        print(f"  {dim('# PowerShell')}")
        print(f"  {powershell}\n")
        print(f"  {dim('# Fish')}")
        print("  register-python-argcomplete --shell fish commit-cat | source")

    print(f"\n{dim('After setup, press TAB to autocomplete flags.')}")
    return 0
