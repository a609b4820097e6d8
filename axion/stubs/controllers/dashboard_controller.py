from axion.controller import Controller
from axion.http import redirect

from axion_app.models import User


class DashboardController(Controller):
    def __init__(self, connection, renderer=None):
        super().__init__(renderer)
        self.connection = connection

    def _current_user(self, request):
        return User.find(self.connection, request.session.get("user"))

    def index(self, request):
        return self.html_response("dashboard")

    def profile(self, request):
        return self.html_response("profile", {"profile": self._current_user(request)})

    def settings(self, request):
        return self.html_response("settings", {"profile": self._current_user(request)})

    def update_profile(self, request):
        User.update_by(
            self.connection,
            "id",
            request.session.get("user"),
            {"name": request.input("name"), "bio": request.input("bio")},
        )
        return redirect("/settings")

    def delete_profile_picture(self, request):
        User.update_by(self.connection, "id", request.session.get("user"), {"picture": None})
        return redirect("/settings")
