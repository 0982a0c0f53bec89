from hydrator.cli.main import main

raise SystemExit(main())
