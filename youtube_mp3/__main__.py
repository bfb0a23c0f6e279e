"""Allow running the tool with ``python -m youtube_mp3``"""

from .main import cli

if __name__ == '__main__':
    cli()
