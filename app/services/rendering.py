from __future__ import annotations

from dataclasses import dataclass

from markupsafe import Markup

from .assess_type import AssessTypeStore


@dataclass
class Activity:
    """The parts of a course activity the rendering hook touches."""

    id: int
    content: str = ""
    after_link: str = ""


def badge_html(label: str) -> Markup:
    return Markup('<span class="badge badge-secondary">{}</span>').format(label)


def render_activity(activity: Activity, store: AssessTypeStore) -> Activity:
    """Append the assess type badge and summary line to a classified activity.

    Unclassified activities are returned untouched.
    """
    name = store.get_type_name(activity.id)
    if name is None:
        return activity

    summary = f"{store.translator.resolve('assesstype')}: {name}"
    if store.is_locked(activity.id):
        summary = f"{summary} ({store.translator.resolve('locked')})"

    activity.after_link = str(Markup(activity.after_link) + badge_html(name))
    activity.content = str(
        Markup(activity.content)
        + Markup('<div class="text-muted small">{}</div>').format(summary)
    )
    return activity
