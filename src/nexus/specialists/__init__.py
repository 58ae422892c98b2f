from nexus.specialists.base import SpecialistAgent, SpecialistResponse
from nexus.specialists.chat import ChatAgent
from nexus.specialists.coder import CoderAgent
from nexus.specialists.documenter import DocumenterAgent
from nexus.specialists.planner import PlannerAgent
from nexus.specialists.tester import TesterAgent

__all__ = [
    "ChatAgent",
    "CoderAgent",
    "DocumenterAgent",
    "PlannerAgent",
    "SpecialistAgent",
    "SpecialistResponse",
    "TesterAgent",
]
