NINJA_EXTRA = {
    "THROTTLE_RATES": {
        "anon": "250/day",
    },
    "NUM_PROXIES": None,
}
