from basesite.dispatcher import RouteSpec, render

ROUTES = [
    RouteSpec("GET", "/", name="home", on_success=render("index")),
]
