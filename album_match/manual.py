from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence

from .models import Direction, LocalTrack, Pair, RemoteTrack

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "Commands: s I J swap local files of pairs I and J | u I unlink pair I | "
    "l I J link remote of pair I with local of pair J | p print | "
    "d or Enter accept | q discard changes"
)


class ManualRefiner(Protocol):
    def refine(
        self,
        local: Sequence[LocalTrack],
        remote: Sequence[RemoteTrack],
        seed_pairs: Sequence[Pair],
        direction: Direction,
    ) -> List[Pair]: ...


class PromptIO(Protocol):
    def print(self, text: str = "") -> None: ...

    def input(self, prompt: str = "") -> str: ...


class ConsolePromptIO:
    def print(self, text: str = "") -> None:
        print(text)

    def input(self, prompt: str = "") -> str:
        return input(prompt)


@dataclass(slots=True)
class BufferPromptIO:
    inputs: List[str] = field(default_factory=list)
    outputs: List[str] = field(default_factory=list)
    prompts: List[str] = field(default_factory=list)

    def print(self, text: str = "") -> None:
        self.outputs.append(text)

    def input(self, prompt: str = "") -> str:
        self.prompts.append(prompt)
        if not self.inputs:
            raise AssertionError("BufferPromptIO has no more inputs")
        return self.inputs.pop(0)


def describe_remote(track: Optional[RemoteTrack]) -> str:
    if track is None:
        return "(no remote track)"
    return f"[{track.disc}-{track.track_number:02d}] {track.name or '<untitled>'}"


def describe_local(track: Optional[LocalTrack]) -> str:
    if track is None:
        return "(no local file)"
    return track.file_name


class PromptManualRefiner:
    """Lets a user fix up a pairing by swapping, unlinking and linking pairs."""

    def __init__(self, prompt_io: Optional[PromptIO] = None) -> None:
        self.prompt_io = prompt_io or ConsolePromptIO()

    def refine(
        self,
        local: Sequence[LocalTrack],
        remote: Sequence[RemoteTrack],
        seed_pairs: Sequence[Pair],
        direction: Direction,
    ) -> List[Pair]:
        io = self.prompt_io
        working = [Pair(local=pair.local, remote=pair.remote) for pair in seed_pairs]
        self._render(working)
        io.print(HELP_TEXT)
        while True:
            raw = io.input("Refine> ").strip().lower()
            if raw in {"", "d"}:
                logger.debug("Manual refinement accepted with %d pairs", len(working))
                return working
            if raw == "q":
                logger.debug("Manual refinement discarded")
                return [Pair(local=pair.local, remote=pair.remote) for pair in seed_pairs]
            if raw == "p":
                self._render(working)
                continue
            parts = raw.split()
            try:
                args = [int(part) - 1 for part in parts[1:]]
            except ValueError:
                io.print("Invalid command; pair numbers must be integers.")
                continue
            if any(idx < 0 or idx >= len(working) for idx in args):
                io.print("Pair number out of range.")
                continue
            command = parts[0]
            if command == "s" and len(args) == 2:
                working = self._swap(working, *args)
            elif command == "u" and len(args) == 1:
                if not working[args[0]].is_matched:
                    io.print("Pair is not linked.")
                    continue
                working = self._unlink(working, args[0])
            elif command == "l" and len(args) == 2:
                first, second = working[args[0]], working[args[1]]
                if first.local is not None or second.remote is not None:
                    io.print("Link needs a remote-only pair followed by a local-only pair.")
                    continue
                working = self._link(working, *args)
            else:
                io.print("Invalid command.")
                io.print(HELP_TEXT)
                continue
            self._render(working)

    def _render(self, pairs: Sequence[Pair]) -> None:
        io = self.prompt_io
        io.print("Current pairing:")
        for idx, pair in enumerate(pairs, 1):
            io.print(f"  {idx:>3}. {describe_remote(pair.remote)}  <->  {describe_local(pair.local)}")

    @staticmethod
    def _swap(pairs: List[Pair], i: int, j: int) -> List[Pair]:
        a, b = pairs[i], pairs[j]
        rebuilt = {i: (b.local, a.remote), j: (a.local, b.remote)}
        result: List[Pair] = []
        for idx, pair in enumerate(pairs):
            if idx in rebuilt:
                loc, rem = rebuilt[idx]
                if loc is None and rem is None:
                    continue
                result.append(Pair(local=loc, remote=rem))
            else:
                result.append(pair)
        return result

    @staticmethod
    def _unlink(pairs: List[Pair], i: int) -> List[Pair]:
        target = pairs[i]
        result = list(pairs[:i])
        result.append(Pair(remote=target.remote))
        result.extend(pairs[i + 1 :])
        result.append(Pair(local=target.local))
        return result

    @staticmethod
    def _link(pairs: List[Pair], i: int, j: int) -> List[Pair]:
        linked = Pair(local=pairs[j].local, remote=pairs[i].remote)
        result: List[Pair] = []
        for idx, pair in enumerate(pairs):
            if idx == i:
                result.append(linked)
            elif idx != j:
                result.append(pair)
        return result
