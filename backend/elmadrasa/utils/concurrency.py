"""
Concurrency utilities: semaphores for resource-limited operations.
"""

import asyncio

# Limits concurrent AI extraction calls to stay under the Gemini rate limit
extraction_semaphore = asyncio.Semaphore(2)
