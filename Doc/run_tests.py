#!/usr/bin/env python
"""
Test runner script for the full retailpos suite
Usage: python Doc/run_tests.py [app ...]
"""
import os
import sys
from pathlib import Path

import django
from django.conf import settings
from django.test.utils import get_runner

APPS = [
    'retailpos.core',
    'retailpos.catalog',
    'retailpos.parties',
    'retailpos.sales',
    'retailpos.purchasing',
    'retailpos.labels',
    'retailpos.reports',
]

if __name__ == "__main__":
    sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'retailpos.config.settings')
    sys.argv = [sys.argv[0], 'test'] + sys.argv[1:]
    django.setup()
    TestRunner = get_runner(settings)
    test_runner = TestRunner()
    labels = [f'retailpos.{name}' for name in sys.argv[2:]] or APPS
    failures = test_runner.run_tests(labels)
    sys.exit(bool(failures))
