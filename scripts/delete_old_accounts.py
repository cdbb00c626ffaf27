#!/usr/bin/env python3
"""Очистка старых почтовых ящиков Zimbra. Запуск из cron, например:
0 3 * * * cd /path/to/project && python scripts/delete_old_accounts.py [--dry-run]"""
import os
import sys

# Корень проекта
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from zimbra_cleanup.app import main

if __name__ == "__main__":
    sys.exit(main())
