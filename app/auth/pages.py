"""
HTML pages for the login, signup completion and logout flow.

Templates are small inline strings; every visitor-supplied value is escaped
before it is interpolated.
"""

from html import escape
from typing import Mapping, Optional

LAYOUT = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title} | Remix Recipes</title>
</head>
<body style="font-family: Arial, sans-serif; text-align: center; color: #333;">
{body}
</body>
</html>
"""


def _page(title: str, body: str) -> str:
    return LAYOUT.format(title=escape(title), body=body)


def _error(errors: Mapping[str, str], field: str) -> str:
    message = errors.get(field)
    if not message:
        return ""
    return f'<p class="error" style="color: #b91c1c;">{escape(message)}</p>'


def _value(value: Optional[object]) -> str:
    return escape(value if isinstance(value, str) else "", quote=True)


def login_page(email: Optional[object] = None, errors: Optional[Mapping[str, str]] = None) -> str:
    errors = errors or {}
    return _page("Log In", f"""
    <h1>Remix Recipes</h1>
    <form method="post" action="/login">
        <input type="email" name="email" placeholder="Email" autocomplete="off" value="{_value(email)}">
        {_error(errors, "email")}
        <button type="submit">Log In</button>
    </form>
""")


def check_email_page(email: str) -> str:
    return _page("Check your email", f"""
    <h1>Check your email</h1>
    <p>We sent a login link to <strong>{escape(email)}</strong>.</p>
    <p>Open it in this browser to continue.</p>
""")


def signup_page(
    first_name: Optional[object] = None,
    last_name: Optional[object] = None,
    errors: Optional[Mapping[str, str]] = None,
) -> str:
    errors = errors or {}
    return _page("Complete signup", f"""
    <h1>You are almost done</h1>
    <h2>Type in your name below to complete the signup process.</h2>
    <form method="post">
        <fieldset>
            <label for="firstName">First Name</label>
            <input id="firstName" name="firstName" autocomplete="off" value="{_value(first_name)}">
            {_error(errors, "firstName")}
            <label for="lastName">Last Name</label>
            <input id="lastName" name="lastName" autocomplete="off" value="{_value(last_name)}">
            {_error(errors, "lastName")}
        </fieldset>
        <button type="submit">Sign up</button>
    </form>
""")


def logout_page() -> str:
    return _page("Logged out", """
    <h1>You're good to go!</h1>
    <p>Logout successful</p>
    <a href="/">Take me home</a>
""")


def app_home_page(first_name: str) -> str:
    return _page("App", f"""
    <h1>Welcome back, {escape(first_name)}</h1>
    <nav>
        <a href="/app/recipes">Recipes</a>
        <a href="/app/pantry">Pantry</a>
        <a href="/app/grocery-list">Grocery List</a>
    </nav>
    <a href="/logout">Log out</a>
""")
