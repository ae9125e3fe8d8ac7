# Minutes viewed per five-minute bucket for one account, largest first.
STREAM_MINUTES_VIEWED_QUERY = """
query ($accountID: String!, $mintime: Time!, $maxtime: Time!) {
  viewer {
    accounts(filter: {accountTag: $accountID}) {
      streamMinutesViewedAdaptiveGroups(
        limit: 1000
        orderBy: [sum_minutesViewed_DESC]
        filter: {datetime_geq: $mintime, datetime_lt: $maxtime}
      ) {
        sum {
          minutesViewed
        }
        dimensions {
          ts: datetimeFiveMinutes
        }
      }
    }
  }
}
"""
