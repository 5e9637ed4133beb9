"""
Page actions for extension cards and detail pages.

An action is a tagged value that the consuming component matches on. The
install deep link itself is built by the site from ``InstallAction.command``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .catalog.base import ExtensionDescriptor

BUILTIN_NOTICE = "Can be enabled in the goose settings page"


@dataclass(frozen=True)
class InstallAction:
    """Install through the command line invocation."""
    command: str


@dataclass(frozen=True)
class BuiltinNoticeAction:
    """Built-in extension; show a notice instead of install affordances."""
    message: str = BUILTIN_NOTICE


@dataclass(frozen=True)
class CustomAction:
    """A plain link, used when there is nothing to install."""
    label: str
    url: str


Action = Union[InstallAction, BuiltinNoticeAction, CustomAction]


def primary_action(descriptor: ExtensionDescriptor) -> Action:
    """Pick the affordance a page shows for an extension.

    Built-in wins over a command; with neither, the page links to the
    upstream source.
    """
    if descriptor.is_builtin:
        return BuiltinNoticeAction()
    if descriptor.command:
        return InstallAction(command=descriptor.command)
    return CustomAction(label="View source", url=descriptor.link)


def action_to_dict(action: Action) -> dict:
    match action:
        case InstallAction(command=command):
            return {"type": "install", "command": command}
        case BuiltinNoticeAction(message=message):
            return {"type": "builtin", "message": message}
        case CustomAction(label=label, url=url):
            return {"type": "custom", "label": label, "url": url}
        case _:
            raise TypeError(f"Unknown action: {action!r}")
