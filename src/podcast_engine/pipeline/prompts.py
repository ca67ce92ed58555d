"""Prompt templates for podcast script generation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

DATE_PLACEHOLDER = "{date}"
CONTENT_PLACEHOLDER = "{content}"

DEFAULT_SYSTEM_PROMPT = (
    "You are a witty tech news podcaster. Create a 5-minute script covering the "
    "top 5-10 most interesting tech stories. Summarize each story in 1-4 sentences, "
    "keeping the tone funny and entertaining. Aim for a mix of humor and information "
    "that will engage and amuse tech-savvy listeners. Focus solely on the content "
    "without any audio cues or formatting instructions. Return only the script that "
    "will be read by the text-to-speech system, without any additional instructions "
    "or metadata."
)

DEFAULT_USER_PROMPT = (
    "It's {date}. Create a hilarious and informative 5-minute podcast script "
    "covering the top 5-10 tech stories from the following content. Make it "
    "entertaining and engaging for our tech-loving audience. Return only the "
    "script to be read, without any formatting or instructions: {content}"
)


@dataclass(frozen=True)
class PromptPair:
    system: str
    user: str


def format_briefing_date(now: datetime) -> str:
    """Return a long-form date such as `Monday, October 19, 2026`."""

    return f"{now:%A}, {now:%B} {now.day}, {now.year}"


def render_template(template: str, *, date: str, content: str) -> str:
    # Literal substitution keeps braces inside scraped content intact.
    rendered = template.replace(DATE_PLACEHOLDER, date)
    return rendered.replace(CONTENT_PLACEHOLDER, content)


def build_prompts(
    content: str,
    now: datetime,
    *,
    system_template: Optional[str] = None,
    user_template: Optional[str] = None,
) -> PromptPair:
    """Render the system/user prompt pair for aggregated page content."""

    date = format_briefing_date(now)
    system = render_template(
        system_template or DEFAULT_SYSTEM_PROMPT, date=date, content=content
    )
    user_template = user_template or DEFAULT_USER_PROMPT
    if CONTENT_PLACEHOLDER not in user_template:
        user_template = f"{user_template}\n\n{CONTENT_PLACEHOLDER}"
    user = render_template(user_template, date=date, content=content)
    return PromptPair(system=system, user=user)


__all__ = [
    "DEFAULT_SYSTEM_PROMPT",
    "DEFAULT_USER_PROMPT",
    "PromptPair",
    "build_prompts",
    "format_briefing_date",
    "render_template",
]
