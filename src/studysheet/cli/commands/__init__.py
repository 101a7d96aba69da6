"""CLI command groups.

The CLI is organized into domain groups: `sheet`, `topic`, `subtopic`
and `question`.
"""

from studysheet.cli.commands.questions import questions
from studysheet.cli.commands.sheet import sheet_group
from studysheet.cli.commands.subtopics import subtopics
from studysheet.cli.commands.topics import topics

__all__ = [
    "questions",
    "sheet_group",
    "subtopics",
    "topics",
]
