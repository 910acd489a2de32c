import re, io
import yaml
from typing import Any
from ..core.ports import FrontmatterCodec

# The closing "---" ends at its own line break; following blank lines are body.
_FM = re.compile(r"^\s*---\s*\n(.*?)\n---[ \t]*(?:\n|\Z)", re.DOTALL)


class _StringTimestampLoader(yaml.SafeLoader):
    """SafeLoader that leaves ISO timestamps as plain strings."""


# ctime is compared as a string; keep it exactly as written in the note.
_StringTimestampLoader.yaml_implicit_resolvers = {
    first: [(tag, rx) for tag, rx in resolvers if tag != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class YamlFrontmatter(FrontmatterCodec):
    def split(self, text: str) -> tuple[str | None, str]:
        """Raw frontmatter block (delimiters included) and body."""
        m = _FM.match(text)
        if not m:
            return None, text
        return text[: m.end()], text[m.end() :]

    def decode(self, text: str) -> tuple[dict[str, Any], str]:
        m = _FM.match(text)
        if not m:
            return {}, text
        try:
            fm = yaml.load(io.StringIO(m.group(1)), Loader=_StringTimestampLoader) or {}
        except yaml.YAMLError:
            fm = {}
        if not isinstance(fm, dict):
            fm = {}
        body = text[m.end() :]
        return (fm, body)
