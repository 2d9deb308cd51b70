"""Speech feature package: text-to-speech and speech-to-text proxies."""
