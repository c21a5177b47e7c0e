#!/usr/bin/env python
"""Django's command-line utility for administrative tasks."""
import os
import sys


def main():
    """Run administrative tasks."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'Config.settings')
    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?"
        ) from exc
    # runserver 未指定地址时监听 PORT（默认 5000）
    if sys.argv[1:] == ['runserver']:
        sys.argv.append(f"0.0.0.0:{os.getenv('PORT', '5000')}")
    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
