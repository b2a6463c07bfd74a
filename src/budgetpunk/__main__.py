"""Desktop launcher: ``python -m budgetpunk``.

Account actions are coroutines; the Qt runtime has no asyncio loop, so each
one runs to completion with `asyncio.run` and blocks the window meanwhile.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from typing import Awaitable, Optional

from budgetpunk.app.bootstrap import AppContext, create_app
from budgetpunk.app.config_store import apply_env_overrides, load_config
from budgetpunk.app.shell import AppShell
from budgetpunk.navigation.routes import PROTECTED_ROUTES, PUBLIC_ROUTES
from budgetpunk.services.event_bus import GUIEvent
from budgetpunk.services.identity import IdentityError

_logger = logging.getLogger("budgetpunk")


def run_account_action(action: Awaitable[None]) -> bool:
    """Run one session operation; False when the provider rejected it.

    The session store has already posted the error notification.
    """
    try:
        asyncio.run(action)  # type: ignore[arg-type]
    except IdentityError as exc:
        _logger.info("Account action failed: %s", exc.code)
        return False
    return True


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="budgetpunk")
    p.add_argument("--data-dir", required=False, help="Directory for config and local storage")
    p.add_argument("--log-level", required=False, help="Root log level (DEBUG, INFO, ...)")
    p.add_argument("--path", default="/", help="Initial route")
    return p


def build_window(ctx: AppContext, shell: AppShell):
    from PyQt6.QtWidgets import (
        QHBoxLayout,
        QLabel,
        QLineEdit,
        QListWidget,
        QMainWindow,
        QPushButton,
        QVBoxLayout,
        QWidget,
    )

    from budgetpunk.components.loading_overlay import LoadingOverlay
    from budgetpunk.stores.overlay_store import OverlayScope

    window = QMainWindow()
    window.setWindowTitle("Budgetpunk")
    root = QWidget(window)
    layout = QHBoxLayout(root)

    nav = QListWidget(root)
    nav.addItems(sorted(PUBLIC_ROUTES | PROTECTED_ROUTES))
    nav.currentTextChanged.connect(shell.navigate)  # type: ignore[attr-defined]
    layout.addWidget(nav)

    content = QWidget(root)
    content_layout = QVBoxLayout(content)
    screen_label = QLabel(shell.screen(), content)
    content_layout.addWidget(screen_label)
    toggle = QPushButton("Toggle theme", content)
    toggle.clicked.connect(lambda: ctx.theme.toggle())  # type: ignore[attr-defined]
    content_layout.addWidget(toggle)

    email = QLineEdit(content)
    email.setPlaceholderText("Email")
    password = QLineEdit(content)
    password.setPlaceholderText("Password")
    password.setEchoMode(QLineEdit.EchoMode.Password)
    sign_in = QPushButton("Sign in", content)
    sign_in.clicked.connect(  # type: ignore[attr-defined]
        lambda: run_account_action(ctx.session.sign_in(email.text(), password.text()))
    )
    sign_up = QPushButton("Create account", content)
    sign_up.clicked.connect(  # type: ignore[attr-defined]
        lambda: run_account_action(ctx.session.sign_up(email.text(), password.text()))
    )
    sign_out = QPushButton("Sign out", content)
    sign_out.clicked.connect(  # type: ignore[attr-defined]
        lambda: run_account_action(ctx.session.log_out())
    )
    for w in (email, password, sign_in, sign_up, sign_out):
        content_layout.addWidget(w)
    content_layout.addStretch(1)
    layout.addWidget(content, 1)
    window.setCentralWidget(root)

    LoadingOverlay(ctx.overlay.indicator(OverlayScope.CONTENT), content)
    LoadingOverlay(ctx.overlay.indicator(OverlayScope.GLOBAL), root)

    def refresh(_evt=None) -> None:
        screen_label.setText(shell.screen())

    ctx.event_bus.subscribe(GUIEvent.ROUTE_CHANGED, refresh)
    ctx.event_bus.subscribe(GUIEvent.SESSION_CHANGED, refresh)
    return window


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = apply_env_overrides(load_config(args.data_dir))
    if args.log_level:
        config = replace(config, log_level=args.log_level.upper())
    ctx = create_app(headless=False, config=config, data_dir=args.data_dir)
    shell = AppShell(ctx)
    window = build_window(ctx, shell)
    shell.start(args.path)
    window.resize(960, 640)
    window.show()
    try:
        return ctx.qt_app.exec()
    finally:
        shell.dispose()


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
