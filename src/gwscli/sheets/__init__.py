"""
Google Sheets helpers: A1 range resolution and the batchUpdate
request bodies the gsheet tool sends.
"""

# can address up to 'ZZZ'
GoogleSheetsMaxColumns = 18278
DEFAULT_SHEET = "Sheet1"
