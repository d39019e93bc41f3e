"""Index of which input value hosts read which other value hosts."""

from __future__ import annotations

from typing import Iterable

from .value_hosts.input import InputValueHost


class DependencyIndex:
    """Maps a value host name to the input hosts whose rules read it.

    Rebuilt whenever the set of value hosts changes. A host never depends on
    itself.
    """

    def __init__(self) -> None:
        self._dependents: dict[str, list[str]] = {}

    def rebuild(self, value_hosts: Iterable[InputValueHost]) -> None:
        dependents: dict[str, list[str]] = {}
        for value_host in value_hosts:
            for name in sorted(value_host.dependency_names):
                dependents.setdefault(name, []).append(value_host.name)
        self._dependents = dependents

    def dependents_of(self, name: str) -> list[str]:
        """Names of input hosts to notify when ``name`` changes, in manager order."""
        return list(self._dependents.get(name, ()))

    def __contains__(self, name: str) -> bool:
        return name in self._dependents
