# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import sys

from authgate.app import main

sys.exit(main())
