"""Sign-in / sign-up screen shown before the app proper."""

from __future__ import annotations

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QFormLayout, QLabel, QLineEdit, QPushButton,
    QFrame, QCheckBox, QTabWidget,
)

from ..auth import AuthError, login, signup


class AuthWidget(QWidget):
    """Mock login and sign-up forms.

    Emits ``logged_in(user, remember)``.  *remember* follows the
    "Remember me" box on the Sign In tab; a new account from the Sign Up
    tab is always remembered.
    """

    logged_in = pyqtSignal(object, bool)

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._build_ui()

    # ── build ─────────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setAlignment(Qt.AlignmentFlag.AlignCenter)

        card = QFrame(self)
        card.setObjectName("card")
        card.setMinimumWidth(360)
        root.addWidget(card)

        layout = QVBoxLayout(card)
        layout.setContentsMargins(28, 24, 28, 24)
        layout.setSpacing(12)

        title = QLabel("Welcome back")
        title.setStyleSheet("font-size: 20px; font-weight: 700;")
        layout.addWidget(title)

        hint = QLabel("Sign in to your productivity space")
        hint.setObjectName("mutedLabel")
        layout.addWidget(hint)

        self._tabs = QTabWidget(card)
        self._tabs.addTab(self._build_sign_in_page(), "Sign In")
        self._tabs.addTab(self._build_sign_up_page(), "Sign Up")
        self._tabs.currentChanged.connect(lambda _i: self._clear_error())
        layout.addWidget(self._tabs)

        self._error_label = QLabel("")
        self._error_label.setObjectName("errorLabel")
        self._error_label.setWordWrap(True)
        self._error_label.setVisible(False)
        layout.addWidget(self._error_label)

    def _build_sign_in_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        form = QFormLayout()

        self._email_input = QLineEdit()
        self._email_input.setPlaceholderText("you@example.com")
        form.addRow("Email", self._email_input)

        self._password_input = QLineEdit()
        self._password_input.setEchoMode(QLineEdit.EchoMode.Password)
        self._password_input.returnPressed.connect(self.submit)
        form.addRow("Password", self._password_input)
        layout.addLayout(form)

        self._remember_cb = QCheckBox("Remember me")
        layout.addWidget(self._remember_cb)

        self._sign_in_btn = QPushButton("Sign In")
        self._sign_in_btn.setObjectName("primaryButton")
        self._sign_in_btn.clicked.connect(self.submit)
        layout.addWidget(self._sign_in_btn)
        return page

    def _build_sign_up_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        form = QFormLayout()

        self._signup_name = QLineEdit()
        self._signup_name.setPlaceholderText("Full name")
        form.addRow("Name", self._signup_name)

        self._signup_email = QLineEdit()
        self._signup_email.setPlaceholderText("you@example.com")
        form.addRow("Email", self._signup_email)

        self._signup_password = QLineEdit()
        self._signup_password.setEchoMode(QLineEdit.EchoMode.Password)
        form.addRow("Password", self._signup_password)

        self._signup_confirm = QLineEdit()
        self._signup_confirm.setEchoMode(QLineEdit.EchoMode.Password)
        self._signup_confirm.returnPressed.connect(self.submit_signup)
        form.addRow("Confirm", self._signup_confirm)
        layout.addLayout(form)

        self._terms_cb = QCheckBox("I agree to the Terms of Service")
        layout.addWidget(self._terms_cb)

        self._sign_up_btn = QPushButton("Create Account")
        self._sign_up_btn.setObjectName("primaryButton")
        self._sign_up_btn.clicked.connect(self.submit_signup)
        layout.addWidget(self._sign_up_btn)
        return page

    # ── actions ───────────────────────────────────────────────────────────

    def submit(self) -> None:
        try:
            user = login(self._email_input.text(), self._password_input.text())
        except AuthError as exc:
            self._show_error(exc)
            return
        self._clear_error()
        self._password_input.clear()
        self.logged_in.emit(user, self._remember_cb.isChecked())

    def submit_signup(self) -> None:
        try:
            user = signup(
                self._signup_name.text(),
                self._signup_email.text(),
                self._signup_password.text(),
                self._signup_confirm.text(),
                agree_to_terms=self._terms_cb.isChecked(),
            )
        except AuthError as exc:
            self._show_error(exc)
            return
        self._clear_error()
        self._signup_password.clear()
        self._signup_confirm.clear()
        self.logged_in.emit(user, True)

    def _show_error(self, exc: AuthError) -> None:
        self._error_label.setText(str(exc))
        self._error_label.setVisible(True)

    def _clear_error(self) -> None:
        self._error_label.setVisible(False)
