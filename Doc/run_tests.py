#!/usr/bin/env python
"""
Test runner script for the whole backend
Usage: python Doc/run_tests.py (from the project root)
"""
import os
import sys
import django
from django.conf import settings
from django.test.utils import get_runner

if __name__ == "__main__":
    sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'backend.config.settings')
    django.setup()
    TestRunner = get_runner(settings)
    test_runner = TestRunner()
    failures = test_runner.run_tests([
        'backend.core',
        'backend.access',
        'backend.workers',
        'backend.photocopies',
        'backend.inventory',
        'backend.reports',
        'backend.client',
    ])
    sys.exit(bool(failures))
