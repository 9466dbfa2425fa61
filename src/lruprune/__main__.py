from lruprune.cli import main

raise SystemExit(main())
