NINJA_EXTRA = {
    "THROTTLE_RATES": {
        "user": "1000/day",
        "anon": "1000/day",
    },
    "NUM_PROXIES": None,
    "PAGINATION_PER_PAGE": 20,
}
