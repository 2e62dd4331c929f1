from prettytable import PrettyTable

from channel_search.db import db
from channel_search.search_engine import ChannelSearch

channel_search = ChannelSearch(db.list_channels())

stats = channel_search.get_stats()
summary = PrettyTable()
summary.field_names = ["Metric", "Value"]
summary.align["Metric"] = "l"
summary.align["Value"] = "r"
summary.add_row(["Channels", stats.total_channels])
summary.add_row(["Categories", stats.unique_categories])
summary.add_row(["Countries", stats.unique_countries])
summary.add_row(["Languages", stats.unique_languages])
summary.add_row(["Indexed terms", stats.indexed_terms])
for source, count in sorted(stats.sources.items(), key=lambda x: -x[1]):
    summary.add_row([f"Source: {source}", count])
print(summary)

for title, facets in (
        ("Category", channel_search.get_categories()),
        ("Country", channel_search.get_countries()),
        ("Language", channel_search.get_languages()),
):
    table = PrettyTable()
    table.field_names = [title, "Channels"]
    table.align[title] = "l"
    table.align["Channels"] = "r"
    for facet in facets[:20]:
        table.add_row([facet.name, facet.count])
    print(table)
