"""Textual CSS themes for aithor."""

APP_CSS = """
/* ── Global ────────────────────────────────── */
Screen {
    background: $surface;
}

/* ── Login Screen ──────────────────────────── */
#login-dialog {
    width: 60;
    height: auto;
    padding: 1 2;
    border: solid $primary;
    background: $surface;
}

LoginScreen {
    align: center middle;
}

#login-title {
    text-align: center;
    text-style: bold;
    margin-bottom: 1;
}

#login-dialog Input {
    margin-bottom: 1;
}

#login-error {
    color: $error;
    height: auto;
}

/* ── Library Screens ───────────────────────── */
#library-header, #local-header, #detail-header {
    dock: top;
    height: 3;
    padding: 1 2;
    background: $primary;
    color: $text;
    text-style: bold;
}

#book-table, #local-table {
    height: 1fr;
}

/* ── Book Detail ───────────────────────────── */
#detail-body {
    height: 1fr;
    padding: 1 4;
}

#detail-info, #detail-status, #detail-stats {
    height: auto;
    margin-bottom: 1;
}

#profile-title {
    text-style: bold;
    margin-bottom: 1;
}

/* ── Reader Screens ────────────────────────── */
#reader-header {
    dock: top;
    height: 1;
    background: $primary;
    color: $text;
    padding: 0 2;
    text-style: bold;
}

#reader-body {
    height: 1fr;
}

#content-text {
    padding: 1 4;
}

.notice {
    color: $warning;
    text-style: italic;
}

.failure {
    color: $error;
}

/* ── Dialogs ───────────────────────────────── */
UploadScreen, ConfirmScreen, TranslateScreen, ProfileScreen {
    align: center middle;
}

#upload-dialog, #translate-dialog, #profile-dialog {
    width: 70;
    height: auto;
    background: $surface;
    border: solid $primary;
    padding: 1 2;
}

#upload-dialog Input, #translate-dialog Input, #translate-dialog Select {
    margin-bottom: 1;
}

#upload-error {
    color: $error;
    height: auto;
}

#confirm-dialog {
    width: 60;
    height: 9;
    background: $surface;
    border: solid $error;
    padding: 1 2;
}

#confirm-msg {
    text-align: center;
    margin: 1 0;
}

.dialog-buttons {
    align: center middle;
    height: 3;
}

.dialog-buttons Button {
    margin: 0 2;
}
"""
