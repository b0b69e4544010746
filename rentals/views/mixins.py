from django.contrib.auth.mixins import LoginRequiredMixin

from ..backend import get_backend
from ..outcomes import Cancelled


class BackendViewMixin(LoginRequiredMixin):
    """
    Signed-in views that read and write through a TableBackend.

    ``backend`` can be handed in with ``as_view(backend=...)``; otherwise the
    one named by ``settings.RENTALS_BACKEND`` is built per request.
    """
    login_url = "account_login"
    redirect_field_name = "next"
    backend = None

    def get_backend(self):
        if self.backend is None:
            self.backend = get_backend()
        return self.backend


def run_form(request, form, backend):
    """
    Drive one POST of an entity form.

    Returns ``Cancelled()`` when the cancel button was pressed,
    ``Submitted(entity)`` after a successful write, or ``None`` when the form
    has errors and must be shown again.
    """
    if "cancel" in request.POST:
        return Cancelled()
    if not form.is_valid():
        return None
    return form.submit(backend)
