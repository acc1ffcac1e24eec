"""Failure detection rules.

Each rule lists regular expressions (matched case-insensitively) that point at
one failure type. Rules are evaluated in table order: common rules first, then
the overlay for the configured platform.
"""

from ..models import FailureSeverity, FailureType

COMMON_PATTERNS: list[dict] = [
    # Test failures
    {
        "type": FailureType.TEST,
        "severity": FailureSeverity.MEDIUM,
        "patterns": [
            r"test(s)?\s+failed",
            r"failing\s+test(s)?",
            r"assertion\s+failed",
            r"expect(ed)?.{1,200}?to\s+(equal|be|include|contain|have)",
            r"AssertionError",
            r"Error:\s+Test\s+suite\s+failed\s+to\s+run",
            r"FAIL\s+[a-zA-Z0-9_./-]+\s+\(\d+\.\d+s\)",
            r"FAIL\s+[a-zA-Z0-9_./-]+\.(test|spec)\.[cm]?[jt]sx?\b",
            r"expect\(jest\.fn\(\)\)\.toHaveBeenCalled",
            r"●\s+.{1,200}?\s+›\s+.",
        ],
        "description": "One or more tests failed during execution",
    },
    # Flaky tests
    {
        "type": FailureType.TEST,
        "severity": FailureSeverity.LOW,
        "patterns": [
            r"intermittent\s+test\s+failure",
            r"flaky\s+test",
            r"test\s+sometimes\s+fails",
            r"timeout\s+exceeded\s+waiting\s+for",
            r"async\s+callback\s+was\s+not\s+invoked\s+within\s+the\s+\d+ms\s+timeout",
            r"element\s+not\s+found",
            r"element\s+not\s+visible",
        ],
        "description": "Tests appear to be flaky or timing-dependent",
    },
    # Build failures
    {
        "type": FailureType.BUILD,
        "severity": FailureSeverity.HIGH,
        "patterns": [
            r"build\s+failed",
            r"compilation\s+failed",
            r"cannot\s+find\s+module",
            r"module\s+not\s+found",
            r"import\s+error",
            r"syntax\s+error",
            r"error\s+TS\d+",
            r"error\s+C\d+",
            r"error\s+MSB\d+",
            r"error\s+NETSDK\d+",
            r"error\s+CS\d+",
            r"error\s+LNK\d+",
            r"error:\s+'[^']+'\s+is\s+not\s+a\s+member\s+of\s+'[^']+'",
            r"error:\s+use\s+of\s+undeclared\s+identifier",
            r"error:\s+expected\s+",
        ],
        "description": "Build or compilation process failed",
    },
    # Dependency issues
    {
        "type": FailureType.DEPENDENCY,
        "severity": FailureSeverity.HIGH,
        "patterns": [
            r"could\s+not\s+find\s+a\s+version\s+that\s+satisfies\s+the\s+requirement",
            r"could\s+not\s+resolve\s+dependencies",
            r"dependency\s+resolution\s+failed",
            r"package\s+not\s+found",
            r"unable\s+to\s+resolve\s+dependency\s+tree",
            r"npm\s+ERR!\s+404",
            r"pip\s+install\s+error",
            r"failed\s+to\s+install\s+dependencies",
            r"no\s+matching\s+version\s+found\s+for",
            r"incompatible\s+dependency",
            r"version\s+conflict",
            r"peer\s+dependency\s+conflict",
            r"requires\s+peer\s+dependency",
            r"npm\s+ERR!\s+code\s+ERESOLVE",
            r"npm\s+ERR!\s+ERESOLVE\s+could\s+not\s+resolve\s+dependency\s+tree",
            r"Could\s+not\s+resolve\s+dependency:",
        ],
        "description": "Issues with dependency resolution or installation",
    },
    # Resource constraints
    {
        "type": FailureType.RESOURCE,
        "severity": FailureSeverity.HIGH,
        "patterns": [
            r"out\s+of\s+memory",
            r"memory\s+limit\s+exceeded",
            r"disk\s+space\s+limit\s+exceeded",
            r"no\s+space\s+left\s+on\s+device",
            r"resource\s+exhausted",
            r"cpu\s+usage\s+limit\s+exceeded",
            r"heap\s+limit\s+exceeded",
            r"JavaScript\s+heap\s+out\s+of\s+memory",
            r"fatal\s+error:\s+Killed\s+process",
            r"exit\s+code\s+137",  # OOM kill
            r"exit\s+code\s+143",  # SIGTERM
        ],
        "description": "Process ran out of memory, disk space, or other resources",
    },
    # Network issues
    {
        "type": FailureType.NETWORK,
        "severity": FailureSeverity.MEDIUM,
        "patterns": [
            r"network\s+error",
            r"connection\s+refused",
            r"connection\s+reset",
            r"connection\s+timed\s+out",
            r"network\s+timeout",
            r"failed\s+to\s+fetch",
            r"unable\s+to\s+connect\s+to",
            r"could\s+not\s+resolve\s+host",
            r"ECONNREFUSED",
            r"ECONNRESET",
            r"ETIMEDOUT",
            r"ENETUNREACH",
            r"socket\s+hang\s+up",
            r"TLS\s+handshake\s+failed",
            r"SSL\s+certificate\s+error",
        ],
        "description": "Network connectivity issues or service unavailability",
    },
    # Permission issues
    {
        "type": FailureType.PERMISSION,
        "severity": FailureSeverity.HIGH,
        "patterns": [
            r"permission\s+denied",
            r"EACCES",
            r"insufficient\s+permissions",
            r"not\s+authorized",
            r"authorization\s+failed",
            r"access\s+denied",
            r"forbidden",
            r"403\s+Forbidden",
            r"401\s+Unauthorized",
            r"authentication\s+failed",
            r"could\s+not\s+authenticate",
            r"API\s+key\s+is\s+invalid",
            r"token\s+is\s+invalid",
            r"no\s+such\s+key",
        ],
        "description": "Permission or authentication issues",
    },
    # Configuration issues
    {
        "type": FailureType.CONFIGURATION,
        "severity": FailureSeverity.MEDIUM,
        "patterns": [
            r"configuration\s+error",
            r"invalid\s+configuration",
            r"missing\s+configuration",
            r"unknown\s+option",
            r"unrecognized\s+option",
            r"invalid\s+option",
            r"missing\s+required\s+option",
            r"missing\s+required\s+parameter",
            r"missing\s+required\s+environment\s+variable",
            r"environment\s+variable\s+not\s+set",
            r"invalid\s+yaml",
            r"invalid\s+json",
            r"invalid\s+syntax",
            r"could\s+not\s+parse",
            r"unexpected\s+token",
        ],
        "description": "Issues with configuration files or settings",
    },
    # Timeout issues
    {
        "type": FailureType.TIMEOUT,
        "severity": FailureSeverity.MEDIUM,
        "patterns": [
            r"timeout\s+exceeded",
            r"timed\s+out",
            r"timeout\s+waiting\s+for",
            r"execution\s+timed\s+out",
            r"job\s+exceeded\s+maximum\s+execution\s+time",
            r"task\s+timed\s+out\s+after",
            r"operation\s+timed\s+out",
            r"ETIMEDOUT",
            r"timeout\s+of\s+\d+ms\s+exceeded",
            r"timeout\s+after\s+\d+s",
        ],
        "description": "Process or operation timed out",
    },
]


PLATFORM_PATTERNS: dict[str, list[dict]] = {
    "github": [
        {
            "type": FailureType.PERMISSION,
            "severity": FailureSeverity.HIGH,
            "patterns": [
                r"refusing\s+to\s+allow\s+a\s+(GitHub App|OAuth App|Personal Access Token)",
                r"permission\s+to\s+[a-zA-Z0-9_/-]+\s+was\s+denied",
                r"workflow\s+does\s+not\s+have\s+permission\s+to\s+access\s+the\s+resource",
                r"Resource\s+not\s+accessible\s+by\s+integration",
            ],
            "description": "GitHub Actions permission issues",
        },
        {
            "type": FailureType.CONFIGURATION,
            "severity": FailureSeverity.MEDIUM,
            "patterns": [
                r"Invalid\s+workflow\s+file",
                r"Workflow\s+is\s+not\s+valid",
                r"The\s+workflow\s+is\s+not\s+valid",
                r"\.github/workflows/[a-zA-Z0-9_-]+\.ya?ml:\s+Error",
            ],
            "description": "GitHub Actions workflow configuration issues",
        },
    ],
    "gitlab": [
        {
            "type": FailureType.CONFIGURATION,
            "severity": FailureSeverity.MEDIUM,
            "patterns": [
                r"\.gitlab-ci\.ya?ml:\s+([a-zA-Z0-9_-]+):\s+config\s+error",
                r"Invalid\s+configuration\s+format",
                r"jobs:[a-zA-Z0-9_-]+\s+config\s+should\s+implement\s+a\s+script\s+or\s+a\s+trigger",
            ],
            "description": "GitLab CI configuration issues",
        },
        {
            "type": FailureType.RESOURCE,
            "severity": FailureSeverity.HIGH,
            "patterns": [
                r"Runner\s+system\s+failure",
                r"Error:\s+Job\s+failed\s+\(system\s+failure\)",
            ],
            "description": "GitLab CI runner resource issues",
        },
    ],
    "circleci": [
        {
            "type": FailureType.CONFIGURATION,
            "severity": FailureSeverity.MEDIUM,
            "patterns": [
                r"Error:\s+Workflow\s+validation\s+error",
                r"Error:\s+Could\s+not\s+find\s+a\s+definition\s+for\s+job",
                r"Error:\s+Unknown\s+executor",
            ],
            "description": "CircleCI configuration issues",
        },
        {
            "type": FailureType.RESOURCE,
            "severity": FailureSeverity.HIGH,
            "patterns": [
                r"Error:\s+Resource\s+class\s+[a-zA-Z0-9_-]+\s+is\s+not\s+available",
                r"Error:\s+No\s+available\s+resource\s+found",
            ],
            "description": "CircleCI resource issues",
        },
    ],
    "aws": [
        {
            "type": FailureType.PERMISSION,
            "severity": FailureSeverity.HIGH,
            "patterns": [
                r"User:\s+arn:aws:[a-zA-Z0-9:-]+\s+is\s+not\s+authorized\s+to\s+perform",
                r"AccessDenied",
                r"not\s+authorized\s+to\s+perform\s+action",
            ],
            "description": "AWS CodePipeline permission issues",
        },
        {
            "type": FailureType.CONFIGURATION,
            "severity": FailureSeverity.MEDIUM,
            "patterns": [
                r"Invalid\s+action\s+configuration",
                r"Action\s+configuration\s+validation\s+failed",
                r"The\s+action\s+failed\s+because\s+the\s+artifact",
            ],
            "description": "AWS CodePipeline configuration issues",
        },
    ],
}
