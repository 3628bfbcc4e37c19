from __future__ import annotations

# GH / API operations
GH_TIMEOUT_SECONDS = 60.0

# Idempotent GH read retry policy
GH_READ_RETRY_ATTEMPTS = 3
GH_READ_RETRY_DELAY_SECONDS = 1.0

# External release tool (npm install + semantic-release run)
NPM_INSTALL_TIMEOUT_SECONDS = 10 * 60.0
SEMANTIC_RELEASE_TIMEOUT_SECONDS = 20 * 60.0
