"""Orchestrator module for intent classification and chat coordination."""

from .intent_classifier import (
    IntentClassifier,
    IntentDescriptor,
    IntentKind,
    NewsCategory,
    SummaryLength,
)
from .routing import Router, RouteInfo, RemoteAction
from .news_chat import NewsChatOrchestrator, ChatReply, StreamingReply
from .session import ChatSession, ChatTurn, ChatRole, ConnectivityState

__all__ = [
    "IntentClassifier",
    "IntentDescriptor",
    "IntentKind",
    "NewsCategory",
    "SummaryLength",
    "Router",
    "RouteInfo",
    "RemoteAction",
    "NewsChatOrchestrator",
    "ChatReply",
    "StreamingReply",
    "ChatSession",
    "ChatTurn",
    "ChatRole",
    "ConnectivityState",
]
