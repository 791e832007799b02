from tarprint.cli import main

raise SystemExit(main())
