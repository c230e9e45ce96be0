"""Repository slug utilities.

Feed sources are GitHub repositories identified by ``owner/name`` slugs. They
are not filesystem paths, even though they use ``/`` as a separator, so they
should be parsed using these helpers rather than ``pathlib``.
"""

from __future__ import annotations


def parse_repo_slug(slug: str) -> tuple[str, str]:
    """Parse a repository slug into owner and name.

    Surrounding whitespace is ignored so values pasted into a request body or
    an environment variable still resolve.

    Parameters
    ----------
    slug:
        Repository slug in ``owner/name`` format.

    Returns
    -------
    tuple[str, str]
        ``(owner, name)``.

    Raises
    ------
    ValueError
        If the slug is not in ``owner/name`` format.

    Examples
    --------
    >>> parse_repo_slug("octo/reef")
    ('octo', 'reef')

    """
    text = slug.strip()
    if text.count("/") != 1:
        msg = f"Invalid repository slug: expected 'owner/name', got {slug!r}"
        raise ValueError(msg)

    owner, name = text.split("/")
    if not owner or not name or any(ch.isspace() for ch in text):
        msg = f"Invalid repository slug: expected 'owner/name', got {slug!r}"
        raise ValueError(msg)

    return owner, name


def normalize_repo_slug(slug: str) -> str:
    """Return ``slug`` in canonical ``owner/name`` form.

    Raises
    ------
    ValueError
        If the slug is not in ``owner/name`` format.

    """
    owner, name = parse_repo_slug(slug)
    return f"{owner}/{name}"
