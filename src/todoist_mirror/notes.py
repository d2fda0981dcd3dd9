"""Note file format: rendering new project notes and reading frontmatter."""

import json
import re
from typing import Any

import yaml
from loguru import logger

ID_KEY = "TodoistId"
URL_KEY = "TodoistUrl"

PROJECT_URL = "https://todoist.com/app/project/{id}"

_UNSAFE_CHARS = re.compile(r'[/\\:*?"<>|\x00-\x1f]+')


def project_url(project_id: str) -> str:
    return PROJECT_URL.format(id=project_id)


def path_segment(name: str) -> str:
    """Turn a project name into a file or folder name.

    Characters that cannot appear in file names on common platforms become
    ``_``. Leading/trailing dots and spaces are stripped so names never hide
    files or climb directories.
    """
    return _UNSAFE_CHARS.sub("_", name).strip(". ") or "unnamed"


def render_project_note(project_id: str, name: str) -> str:
    """Render the initial contents of a project note.

    The frontmatter carries the identity tag; the body links to the project
    and embeds a ``todoist`` query block filtered on the project name.
    """
    url = project_url(project_id)
    query = json.dumps({"name": name, "filter": f"#{name}"}, ensure_ascii=False)[1:-1]
    return (
        "---\n"
        f"{ID_KEY}: {project_id}\n"
        f"{URL_KEY}: {url}\n"
        "---\n"
        f"[{name}]({url})\n"
        "```todoist\n"
        "{\n"
        f"{query}\n"
        "}\n"
        "```\n"
    )


def split_frontmatter(text: str) -> tuple[str | None, str]:
    """Split a note into (frontmatter source, body).

    Returns None for the frontmatter if the note does not start with a
    ``---`` fenced block.
    """
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != "---":
        return None, text
    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == "---":
            return "".join(lines[1:i]), "".join(lines[i + 1 :])
    return None, text


def parse_frontmatter(text: str, *, source: str = "<note>") -> dict[str, Any]:
    """Parse the YAML frontmatter of a note.

    Returns an empty dict when there is no frontmatter or it is not a valid
    YAML mapping. Scalars are kept as strings, so numeric-looking IDs such as
    ``0123`` are read back exactly as written.
    """
    raw, _body = split_frontmatter(text)
    if raw is None:
        return {}
    try:
        data = yaml.load(raw, Loader=yaml.BaseLoader)
    except yaml.YAMLError as e:
        logger.debug("Ignoring malformed frontmatter in {!r}: {}", source, e)
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def identity_of(metadata: dict[str, Any]) -> str | None:
    """Return the identity tag from frontmatter, normalized to a string."""
    value = metadata.get(ID_KEY)
    if value is None or isinstance(value, (bool, list, dict)):
        return None
    value = str(value).strip()
    return value or None
