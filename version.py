# Copyright 2025, the glo2csv authors.  MIT License (see LICENSE).

version = '1.0.0'
