"""
Constants shared by the services and the API layer.
"""

# Pagination for list endpoints
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Ranking lengths
MAX_RANKED_ITEMS = 10
MAX_RANKED_GRAND_SLAM_FINALS = 5
