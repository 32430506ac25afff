# app.py
"""
Application entrypoint.

Usage:
  python app.py migrate --db cafeteria.db
  python app.py item import items.xlsx
  python app.py committee list
  python app.py president approve <item-id>
  python app.py stock
  python app.py menu now
"""

from cafeteria.adapters.cli import main

if __name__ == "__main__":
    main()
