# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Web Server Gateway Interface entry-point."""

import os

from accounts_api.app import create_app

app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "4000")), debug=True)
