#!/usr/bin/env python3
"""Signup conversation in the terminal.

Flow (flow.json):
1. Ask for a name
2. Ask whether to subscribe to the newsletter
3. No: say goodbye
   Yes: run the email subroutine (email.json), then say thanks

Type "back" at any prompt to return to the previous question.

Usage:
    python examples/signup/run.py
    python examples/signup/run.py -v      # debug logging
"""

import asyncio
import sys
from pathlib import Path

from flowtalk import FlowtalkConfig, ModuleRegistry, conversation
from flowtalk.core.logging_config import configure_logging

HERE = Path(__file__).parent

# =============================================================================
# STEPS
# =============================================================================


class TextStep:
    """Free text answer, complete once non-empty (and matching ``same_as``)."""

    def __init__(self, answers, name, label, same_as=None, **props):
        self.answers = answers
        self.name = name
        self.label = label
        self.same_as = same_as

    def is_ready(self):
        return True

    def is_complete(self, throw_on_error=False):
        value = self.answers.get(self.name)
        if not value:
            return False
        if self.same_as and value != self.answers.get(self.same_as):
            if throw_on_error:
                raise ValueError(f"{self.label} does not match")
            return False
        return True

    async def render(self, context):
        answer = await asyncio.to_thread(input, f"{self.label}: ")
        if answer.strip() == "back":
            return "back"
        self.answers[self.name] = answer.strip()
        return None


class ConfirmStep(TextStep):
    """Yes/no answer."""

    def is_complete(self, throw_on_error=False):
        return self.name in self.answers

    async def render(self, context):
        answer = await asyncio.to_thread(input, f"{self.label} [y/n]: ")
        if answer.strip() == "back":
            return "back"
        self.answers[self.name] = answer.strip().lower().startswith("y")
        return None


class MessageStep:
    """Print a message. Only reachable when every ``when`` answer matches."""

    def __init__(self, answers, label, when=None, **props):
        self.answers = answers
        self.label = label
        self.when = when or {}

    def is_ready(self):
        return all(self.answers.get(k) == v for k, v in self.when.items())

    def is_complete(self, throw_on_error=False):
        return True

    def render(self, context):
        print(self.label)
        return None


# =============================================================================
# MAIN
# =============================================================================


def build_registry(answers):
    registry = ModuleRegistry()
    registry.register("text", lambda **props: TextStep(answers, **props))
    registry.register("confirm", lambda **props: ConfirmStep(answers, **props))
    registry.register("message", lambda **props: MessageStep(answers, **props))
    return registry


async def main(verbose=False):
    if verbose:
        configure_logging(level="DEBUG")

    answers = {}
    convo = await conversation(
        src="flow.json",
        registry=build_registry(answers),
        config=FlowtalkConfig(base_dir=HERE),
    )
    convo.subscribe(lambda action, step: print(f"  [{action}] {step.id if step else '-'}"))

    await convo.is_ready()
    while True:
        if await convo.render() == "back":
            await convo.back()
            continue
        if await convo.continue_() is None:
            break

    print(f"\nAnswers: {answers}")
    print(f"Complete: {await convo.is_complete()}")


if __name__ == "__main__":
    asyncio.run(main(verbose="-v" in sys.argv[1:]))
