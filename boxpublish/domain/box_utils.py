from typing import List, Sequence

OUTPUT_PLACEHOLDER = "{output}"


def join_url(base: str, *parts: str) -> str:
    """
    Join a base URL and path segments with single slashes.

    Only the seams are normalized; slashes inside a segment (e.g. the
    'namespace/boxname' qualified name) are kept as-is.
    """
    segments = [base.rstrip("/")]
    segments.extend(p.strip("/") for p in parts if p)
    return "/".join(segments)


def render_command(template: Sequence[str], output: str) -> List[str]:
    """
    Substitute the artifact output path into an export command template.

    If no argument carries the {output} placeholder the path is appended
    as the last argument.
    """
    if not any(OUTPUT_PLACEHOLDER in arg for arg in template):
        return [*template, output]
    return [arg.replace(OUTPUT_PLACEHOLDER, output) for arg in template]
