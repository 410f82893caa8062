"""Plugins and the plugin registry."""

from roomfolks.plugins.assistant import AssistantPlugin
from roomfolks.plugins.base import Plugin
from roomfolks.plugins.registry import PluginRegistry
from roomfolks.plugins.sayhi import SayHiPlugin

__all__ = ["Plugin", "PluginRegistry", "AssistantPlugin", "SayHiPlugin"]
