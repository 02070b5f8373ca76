# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
from scholaris.main import run

if __name__ == "__main__":
    run()
