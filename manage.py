#!/usr/bin/env python
"""
Command line entry point for the Medicare backend.

Sets ``medicare.settings`` as the default settings module and hands the
arguments to Django's management utility (``runserver``, ``migrate``,
``seed_data``, ``grant_role`` ...).
"""
import os
import sys


def main() -> None:
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'medicare.settings')
    try:
        from django.core.management import execute_from_command_line  # type: ignore
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Is it installed and available on your "
            "PYTHONPATH? Did you forget to activate a virtual environment?"
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
