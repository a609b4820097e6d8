from axion.middleware import Authenticate, Pipeline, default_middleware

from axion_app.controllers.dashboard_controller import DashboardController

# (method, path, action name, route name)
ROUTES = [
    ("GET", "/dashboard", "index", "dashboard"),
    ("GET", "/profile", "profile", "profile"),
    ("GET", "/settings", "settings", "settings"),
    ("POST", "/settings/profile", "update_profile", "update.profile"),
    ("POST", "/settings/delete-profile-picture", "delete_profile_picture", "delete.profile.picture"),
]


def register(router, connection, renderer):
    controller = DashboardController(connection, renderer)
    pipeline = Pipeline(default_middleware() + [Authenticate()])
    for method, path, action, name in ROUTES:
        router.add(method, path, pipeline.then(getattr(controller, action)), name=name)
