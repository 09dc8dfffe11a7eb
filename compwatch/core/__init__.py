"""Report rendering pipeline: sanitizer, glossary store, matcher, annotator, render surface"""
