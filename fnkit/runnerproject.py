"""Runner project identity, paths and versions, and function run requests."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any

__all__ = ["Runner", "RunFunctionRequest", "is_version", "new_runner"]

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MAX = 2**63 - 1
_INT64_MIN = -(2**63)


def _parse_int(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid syntax: {text!r}")
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"value out of range: {text!r}")
    return value


def is_version(v: str) -> bool:
    """Return True if ``v`` looks like ``v<non-negative integer>``."""
    if not v or v[0] != "v":
        return False
    try:
        return _parse_int(v[1:]) >= 0
    except ValueError:
        return False


@dataclass
class Runner:
    """A user's runner application, rooted at a directory on disk."""

    kind: str = ""
    language: str = ""
    name: str = ""
    version: str = ""
    user: str = ""
    root: str = field(default="", repr=False)

    def request_subject(self) -> str:
        return f"runner.{self.user}.{self.name}.{self.version}.run"

    def current_version(self) -> str:
        """Read the version recorded in the runner's metadata, or ``v0``."""
        path = os.path.join(self.root, self.user, self.name, "workplace", "metadata", "version.txt")
        try:
            with open(path, encoding="utf-8") as fh:
                text = fh.read()
        except OSError:
            text = ""
        return text or "v0"

    def bin_path(self) -> str:
        return f"{self.root}/{self.user}/{self.name}/workplace/bin"

    def request_path(self) -> str:
        return f"{self.bin_path()}/.request"

    def build_name(self) -> str:
        return f"{self.user}_{self.name}_{self.version}"

    def version_num(self) -> int:
        """The numeric part of the version; raises ValueError if there is none."""
        return _parse_int(self.version.replace("v", ""))

    def next_version(self) -> str:
        try:
            num = self.version_num()
        except ValueError as exc:
            logger.warning("cannot read version number: %s", exc)
            num = 0
        return f"v{num + 1}"

    def to_dict(self) -> dict[str, str]:
        return {
            "kind": self.kind,
            "language": self.language,
            "name": self.name,
            "version": self.version,
            "user": self.user,
        }


def new_runner(user: str, name: str, root: str, version: str | None = None) -> Runner:
    """Build a runner; without ``version`` the one recorded on disk is used."""
    if not user:
        raise ValueError("user is empty")
    if not name:
        raise ValueError("name is empty")
    runner = Runner(user=user, name=name, root=root)
    if version is not None:
        if not is_version(version):
            raise ValueError("is failed version")
        runner.version = version
    else:
        runner.version = runner.current_version()
    return runner


@dataclass
class RunFunctionRequest:
    """A request to run a function inside a runner."""

    runner_id: str = ""
    runner: Runner | None = None
    trace_id: str = ""
    router: str = ""
    method: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    body_type: str = ""
    body: Any = None
    url_query: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "runner_id": self.runner_id,
            "runner": self.runner.to_dict() if self.runner is not None else None,
            "trace_id": self.trace_id,
            "router": self.router,
            "method": self.method,
            "headers": dict(self.headers),
            "body_type": self.body_type,
            "body": self.body,
            "url_query": self.url_query,
        }