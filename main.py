import sys

from courier.__main__ import main

__prog__ = "courier"

__styles__ = {
    "code": "bold #FFB000",
    "error-title": "bold #FF5F5F",
}


if __name__ == '__main__':
    sys.exit(main())
