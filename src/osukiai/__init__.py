# osukiai: BPM section and kiai interval analysis for osu! beatmaps
# Package: osukiai

__version__ = "1.0.0-dev"
__author__ = "osukiai Contributors"
__description__ = "Tempo and highlight-span analysis for osu! beatmap files"

# Module structure:
#   - osukiai.analyze   : .osu text analysis (BPM sections, kiai intervals)
#   - osukiai.archive   : .osz archive reading and extraction
#   - osukiai.direct    : osu.direct search/download client
#   - osukiai.report    : Text rendering of analysis results
#   - osukiai.config    : Configuration management
#   - osukiai.cli       : Command-line interface
