from django.urls import reverse

from .navigation import NAVIGATION


def navigation(request):
    """Sidebar entries with the one matching the current path marked active."""
    path = request.path
    items = []
    for entry in NAVIGATION:
        href = reverse(entry["url_name"])
        if href == "/":
            active = path == "/"
        else:
            active = path.startswith(href)
        items.append({**entry, "href": href, "active": active})
    return {"navigation": items}
