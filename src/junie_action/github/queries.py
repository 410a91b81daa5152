"""GraphQL queries for issue and pull request context."""

_TIMELINE_FRAGMENT = """
      timelineItems(first: 100, itemTypes: [ISSUE_COMMENT, REFERENCED_EVENT, CROSS_REFERENCED_EVENT]) {
        nodes {
          __typename
          ... on IssueComment {
            databaseId
            body
            createdAt
            author { login }
          }
          ... on ReferencedEvent {
            createdAt
            commit { oid }
          }
          ... on CrossReferencedEvent {
            createdAt
            source {
              __typename
              ... on Issue { number title }
              ... on PullRequest { number title }
            }
          }
        }
      }
"""

PULL_REQUEST_QUERY = (
    """
query($owner: String!, $repo: String!, $number: Int!) {
  repository(owner: $owner, name: $repo) {
    pullRequest(number: $number) {
      number
      title
      body
      state
      url
      author { login }
      headRefName
      baseRefName
      additions
      deletions
      changedFiles
      commits { totalCount }
      files(first: 100) {
        nodes { path changeType additions deletions }
      }
      reviews(first: 100) {
        nodes {
          databaseId
          body
          state
          submittedAt
          author { login }
          comments(first: 100) {
            nodes {
              databaseId
              body
              path
              position
              diffHunk
              createdAt
              author { login }
            }
          }
        }
      }
"""
    + _TIMELINE_FRAGMENT
    + """
    }
  }
}
"""
)

ISSUE_QUERY = (
    """
query($owner: String!, $repo: String!, $number: Int!) {
  repository(owner: $owner, name: $repo) {
    issue(number: $number) {
      number
      title
      body
      state
      url
      author { login }
"""
    + _TIMELINE_FRAGMENT
    + """
    }
  }
}
"""
)
