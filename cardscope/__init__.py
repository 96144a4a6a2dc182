"""cardscope - faceted card catalog browsing.

Compiles URL-shaped filter parameters into query plans, executes them against
a card source with offset/limit paging, and drives incremental loading with
scroll restoration on the client side.
"""
