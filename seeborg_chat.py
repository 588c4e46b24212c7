#!/usr/bin/env python3
"""SeeBorg Terminal Chat.

Talk to the bot from a terminal without any chat platform. Lines go through
the same learn/reply decisions as every other transport, using the base
behavior from the configuration file.
"""

import logging
import os
import sys

# Ensure project root is on path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from seeborg.borg import Borg
from seeborg.config import ConfigError, load_config
from seeborg.seeborg_logger import setup_logger
from seeborg.storage import DictionaryError, load_dictionary, save_dictionary

CYAN = "\033[96m"
GREEN = "\033[92m"
GRAY = "\033[90m"
RESET = "\033[0m"

CONSOLE_USER = "console"


def main():
    """Run the interactive loop until /quit or end of input."""
    setup_logger(logging.WARNING)
    try:
        config = load_config()
        dictionary = load_dictionary(config.dictionary_path)
    except (ConfigError, DictionaryError) as e:
        print(f"{GRAY}[SeeBorg Chat] {e}{RESET}")
        sys.exit(1)

    if dictionary.needs_rebuild():
        dictionary.rebuild_indices()
    borg = Borg(dictionary, config.behavior)

    # Always answer when possible instead of rolling against reply_rate.
    always_reply = os.environ.get("SEEBORG_CHAT_ALWAYS_REPLY", "1") != "0"

    print(f"{CYAN}◈ SeeBorg Terminal Chat{RESET}")
    print(f"  Dictionary: {config.dictionary_path}")
    print("  Commands: /stats | /words <line> | /save | /quit")
    print()

    dirty = False
    while True:
        try:
            line = input(f"{GREEN}you>{RESET} ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye.")
            break
        if not line:
            continue
        if line.lower() in ("/quit", "/exit"):
            print("Bye.")
            break

        if line.lower() == "/stats":
            stats = borg.stats()
            print(f"{CYAN}[Stats]{RESET} {stats['sentences']} sentences, {stats['words']} words")
            continue

        if line.lower().startswith("/words "):
            words = borg.dictionary.known_words(line[7:])
            print(f"{CYAN}[Known]{RESET} {', '.join(words) if words else 'none'}")
            continue

        if line.lower() == "/save":
            try:
                save_dictionary(config.dictionary_path, borg.snapshot())
                dirty = False
                print(f"{CYAN}[Saved]{RESET} {config.dictionary_path}")
            except DictionaryError as e:
                print(f"{GRAY}[Save failed] {e}{RESET}")
            continue

        if always_reply:
            with borg.lock:
                response = borg.respond_to(line)
                if borg.should_learn(CONSOLE_USER, line):
                    dirty = borg.learn(line) or dirty
        else:
            before = len(borg.dictionary.sentences)
            response = borg.process_line(CONSOLE_USER, line)
            dirty = dirty or len(borg.dictionary.sentences) != before

        if response:
            print(f"{CYAN}seeborg>{RESET} {response}")

    if dirty:
        try:
            save_dictionary(config.dictionary_path, borg.snapshot())
        except DictionaryError as e:
            print(f"{GRAY}[Save failed] {e}{RESET}")


if __name__ == "__main__":
    main()
