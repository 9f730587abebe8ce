"""Prompt builders for file summaries, file questions and folder roll-ups.

All builders are pure: the same arguments always give the same text, which
keeps token estimates (and therefore model choice) reproducible.
"""

from __future__ import annotations

from typing import Sequence

from treedoc.config.defaults import DEFAULT_CONTENT_TYPE, DEFAULT_TARGET_AUDIENCE

from .models import FileSummary, FolderSummary


def create_code_file_summary(
    file_path: str,
    project_name: str,
    file_contents: str,
    content_type: str = DEFAULT_CONTENT_TYPE,
) -> str:
    return f"""You are a {content_type} documentation expert working on a project called {project_name}.
The {content_type} below comes from the file `{file_path}`.
Write a detailed technical explanation of what this {content_type} does and how it may be used in the larger project.
Include short examples where they help. Write in markdown.
Do not state that the file is part of the {project_name} project.

{content_type}:
{file_contents}

Response:
"""


def create_code_questions(
    file_path: str,
    project_name: str,
    file_contents: str,
    content_type: str = DEFAULT_CONTENT_TYPE,
    target_audience: str = DEFAULT_TARGET_AUDIENCE,
) -> str:
    return f"""You are a {content_type} documentation expert working on a project called {project_name}.
The {content_type} below comes from the file `{file_path}`.
List 3 questions a {target_audience} might ask about this {content_type}, and answer each in 1-2 sentences.
Write in markdown.

{content_type}:
{file_contents}

Questions and answers:
"""


def folder_summary_prompt(
    folder_path: str,
    project_name: str,
    files: Sequence[FileSummary],
    folders: Sequence[FolderSummary],
    content_type: str = DEFAULT_CONTENT_TYPE,
) -> str:
    file_lines = "\n".join(f"Name: {f.file_name}\nSummary: {f.summary}\n" for f in files)
    folder_lines = "\n".join(f"Name: {f.folder_name}\nSummary: {f.summary}\n" for f in folders)
    return f"""You are a {content_type} documentation expert working on a project called {project_name}.
You are documenting the folder `{folder_path}`.

Files in this folder, each with a summary of its contents:

{file_lines or "(none)"}

Subfolders of this folder, each with a summary of its contents:

{folder_lines or "(none)"}

Explain how the {content_type} in this folder fits into the larger project and how its parts work together.
Include short examples where they help. Write in markdown.
Do not just list the files and folders, and do not state that the folder is part of the {project_name} project.

Response:
"""
