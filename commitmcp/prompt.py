#!/usr/bin/env python3

import os
import re
from typing import Optional, Set

from .config import get_conventional_prompt_template, get_prompt_template
from .conventional import COMMIT_TYPES

__all__ = [
    "DEFAULT_COMMIT_PROMPT",
    "DEFAULT_CONVENTIONAL_COMMIT_PROMPT",
    "get_commit_prompt",
    "get_conventional_commit_prompt",
    "render_prompt",
    "scope_instruction",
]

TOKEN_RE = re.compile(r"\{(diff|scope_instruction|scope)\}")

DEFAULT_COMMIT_PROMPT = f"""Please analyze the following git diff and generate a commit message strictly following the Conventional Commits specification (v1.0.0).

The commit message structure MUST be:
<type>[optional scope]: <description>

[optional body]

[optional footer(s)]

Key elements:
1.  **Header:**
    * **<type>:** Must be one of the allowed types: {", ".join(COMMIT_TYPES)}.
    * **[optional scope]:** A noun within parentheses describing the section of the codebase affected (e.g., `(parser)`, `(api)`, `(ui)`). {{scope_instruction}}
    * **<description>:** Concise summary of the change in imperative, present tense (e.g., "add", "fix", "change" not "added", "fixed", "changed"). Do NOT capitalize the first letter. Do NOT end with a period.

2.  **[optional body]:**
    * Starts after the header and a single blank line.
    * Provides context, motivation, and reasoning for the change. Explain *what* and *why* vs. *how*.
    * Can contain multiple paragraphs separated by blank lines.

3.  **[optional footer(s)]:**
    * Starts after the body and a single blank line.
    * Formatted as key-value pairs like Git trailers (e.g., `Reviewed-by: Name`, `Refs: #123`).
    * **BREAKING CHANGE:** If the commit introduces a breaking API change (correlates with SEMVER MAJOR), it MUST have a footer starting with `BREAKING CHANGE: ` followed by a description of the breaking change.
    * Alternatively or additionally, a `!` can be appended to the type/scope in the header (e.g., `feat!:` or `fix(auth)!:`) to indicate a BREAKING CHANGE. Include the footer description regardless.

Example of a full message:
```
feat(auth)!: implement multi-factor authentication

Introduce TOTP-based multi-factor authentication upon login.
Users can enable this in their profile settings.

BREAKING CHANGE: User authentication endpoint now requires an MFA token if MFA is enabled for the account.
Refs: #456
Reviewed-by: Jane Doe
```

Now, analyze the following git diff and generate the complete commit message:

{{diff}}
"""

DEFAULT_CONVENTIONAL_COMMIT_PROMPT = """Based on the following git diff, please write a commit message following the Conventional Commits format (type(scope): description).

Types include: feat, fix, docs, style, refactor, test, chore, etc.
{scope_instruction}

Focus on being concise but descriptive, using imperative mood.
Include a brief description of the changes after the header if helpful.

Here's the git diff:

{diff}"""


def get_commit_prompt() -> str:
    """Return the commit prompt template.

    MCP_COMMIT_PROMPT wins over the config file, which wins over the
    built-in template.
    """
    return os.environ.get("MCP_COMMIT_PROMPT") or get_prompt_template() or DEFAULT_COMMIT_PROMPT


def get_conventional_commit_prompt() -> str:
    return (
        os.environ.get("MCP_CONVENTIONAL_COMMIT_PROMPT")
        or get_conventional_prompt_template()
        or DEFAULT_CONVENTIONAL_COMMIT_PROMPT
    )


def scope_instruction(scope: Optional[str]) -> str:
    if scope:
        return f'Use the provided scope "{scope}".'
    return (
        "Determine an appropriate scope based on the changes if applicable, "
        "otherwise omit the scope."
    )


def render_prompt(template: str, diff: str, scope: Optional[str] = None) -> str:
    """Substitute the diff and scope into a prompt template.

    Recognized tokens are ``{scope_instruction}``, the older ``{scope}``
    (rendered as ``with scope "X" `` or nothing) and ``{diff}``.  Each is
    replaced at its first occurrence only; tokens a template lacks are
    simply not used, and other braces are left verbatim.  Substitution is a
    single pass, so token-like text inside the diff or scope is not expanded.

    Args:
        template: The prompt template
        diff: The rendered diff text
        scope: Optional scope requested by the caller

    Returns:
        The filled-in prompt
    """
    values = {
        "diff": diff,
        "scope_instruction": scope_instruction(scope),
        "scope": f'with scope "{scope}" ' if scope else "",
    }
    used: Set[str] = set()

    def substitute(match: "re.Match[str]") -> str:
        token = match.group(1)
        if token in used:
            return match.group(0)
        used.add(token)
        return values[token]

    return TOKEN_RE.sub(substitute, template)
