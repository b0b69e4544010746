from django import template

register = template.Library()

PRIORITY_BADGES = {
    "high": "bg-danger-subtle text-danger-emphasis",
    "medium": "bg-warning-subtle text-warning-emphasis",
    "low": "bg-success-subtle text-success-emphasis",
}

STATUS_BADGES = {
    "completed": "bg-success-subtle text-success-emphasis",
    "in progress": "bg-warning-subtle text-warning-emphasis",
    "scheduled": "bg-info-subtle text-info-emphasis",
    "available": "bg-success-subtle text-success-emphasis",
    "occupied": "bg-primary-subtle text-primary-emphasis",
    "active": "bg-success-subtle text-success-emphasis",
}

DEFAULT_BADGE = "bg-secondary-subtle text-secondary-emphasis"


@register.filter
def priority_badge(priority):
    return PRIORITY_BADGES.get((priority or "").lower(), DEFAULT_BADGE)


@register.filter
def status_badge(status):
    return STATUS_BADGES.get((status or "").lower(), DEFAULT_BADGE)


@register.filter
def euro(amount):
    if amount is None or amount == "":
        amount = 0
    return f"€{amount:,.2f}"
