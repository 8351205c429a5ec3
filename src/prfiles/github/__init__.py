"""GitHub side of prfiles.

  - list open pull requests of a repository
  - download each pull request's diff, following redirects
  - parse the diff into the file paths it touches
  - render the resulting file index
"""
