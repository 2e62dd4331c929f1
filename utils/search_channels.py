"""
Runs a query against the stored catalog and prints the ranked page.
Usage: python -m utils.search_channels "bbc news" [category] [country]
"""
import sys

from prettytable import PrettyTable

from channel_search.db import db
from channel_search.search_engine import ChannelSearch

query = sys.argv[1] if len(sys.argv) > 1 else ""
category = sys.argv[2] if len(sys.argv) > 2 else None
country = sys.argv[3] if len(sys.argv) > 3 else None

channel_search = ChannelSearch(db.list_channels())
page = channel_search.search(query, category=category, country=country, limit=30)

table = PrettyTable()
table.field_names = ["Score", "ID", "Name", "Category", "Country", "Language"]
table.align["Score"] = "r"
table.align["Name"] = "l"
for result in page.results:
    channel = result.channel
    table.add_row([result.score, channel.id, channel.name, channel.category, channel.country, channel.language])

print(f"{page.total} channels match {query!r}")
print(table)

suggestions = channel_search.get_suggestions(query.split()[-1] if query.split() else "", 10)
if suggestions:
    print("Suggestions:", ", ".join(f"{item.text} ({item.count})" for item in suggestions))
