import auth

# Full-strength bcrypt makes the suite crawl.
auth.BCRYPT_ROUNDS = 4
